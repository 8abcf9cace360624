"""Control OWON HDS200 series instruments over their SCPI bulk link."""

__version__ = "0.3.0"
