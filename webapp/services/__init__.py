"""
Use cases of the webapp API.

Each service module orchestrates repositories and adapters to implement
business rules (register an account, verify an e-mail, manage products and
their images, answer liveness probes). Routers call these services instead
of touching the database directly.
"""
