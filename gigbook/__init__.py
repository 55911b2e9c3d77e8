"""Gigbook: songs, venues, setlists, shows and stage plots for a touring band."""
