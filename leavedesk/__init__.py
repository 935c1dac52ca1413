"""LeaveDesk — employee leave requests, balances, and approvals."""
