"""Client-side synchronization of questionnaire check-in history.

Fetches submissions from the backend, verifies the server's ordering against
the client's sort policy and publishes a filtered, sorted list to observers.
"""
