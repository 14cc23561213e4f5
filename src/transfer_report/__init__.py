"""Transfer activity report generator."""
