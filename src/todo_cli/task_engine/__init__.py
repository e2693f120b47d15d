"""Task engine for todo-cli.

``model`` holds the Task entity and its predicates, ``store`` the JSON file
persistence, and ``manager`` the in-memory collection with its operations.
"""
