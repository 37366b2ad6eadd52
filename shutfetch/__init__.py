"""Asynchronous JSON fetch tasks with bounded retries and single-callback delivery."""
