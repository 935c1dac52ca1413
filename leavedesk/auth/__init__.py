"""Auth module — registration, login, bearer sessions, role checks."""
