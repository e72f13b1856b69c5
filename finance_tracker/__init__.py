# finance_tracker/__init__.py
"""Client core for the personal finance tracker: API client, auth state
machine, session store and record controllers used by the Streamlit frontend."""

__version__ = "0.1.0"
