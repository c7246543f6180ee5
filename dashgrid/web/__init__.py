"""Web service: HTTP endpoints over the layout engine."""
