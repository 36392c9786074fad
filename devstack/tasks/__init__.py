"""
Higher-level methods to manage the development services.

Each public function in this module should:

- perform a complete task, as needed by a script or user action
- avoid non-idempotent calls unless required by the current state of the service
- re-inspect the service state on each call rather than relying on earlier results
"""
