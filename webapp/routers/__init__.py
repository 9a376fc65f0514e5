"""HTTP routers for the webapp API."""
