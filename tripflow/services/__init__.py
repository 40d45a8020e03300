"""Service layer: role-scoped repositories, workflow and administration."""
