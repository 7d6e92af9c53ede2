"""Static assets (script and stylesheet) served under /assets."""
