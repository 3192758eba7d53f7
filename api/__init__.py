"""HTTP routers for rooms and interview sessions."""
