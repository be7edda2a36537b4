"""
Application services.

Services hold the business workflows behind the API routers. They raise
``unipivot.core.exceptions`` errors and commit the session when a workflow
finishes; helpers that only take part in a larger workflow leave committing
to their caller.
"""
