"""Quality Gates build step packages."""
