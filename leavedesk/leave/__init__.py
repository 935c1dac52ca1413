"""Leave module — validation rules, balance ledger, approval lifecycle."""
