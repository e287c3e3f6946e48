"""
Migration between storage backends.

The orchestrator runs status, export, import, backup and switch; the
backend state tracker records which backend the game server should use
after a completed switch.
"""
