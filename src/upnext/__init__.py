"""upnext - a context-aware terminal todo list."""
