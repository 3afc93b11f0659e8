"""bureaucrate: changelog and version bump bookkeeping for uv workspaces."""
