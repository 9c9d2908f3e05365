"""adapters - Driving adapters (REST/WebSocket, CLI) over the ServiceFactory."""
