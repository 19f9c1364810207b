"""taskdocs: task records with one attached document, kept on Supabase."""

__version__ = "0.1.0"
