from __future__ import annotations

# gh api calls
GH_TIMEOUT_SECONDS = 60.0

# Local git operations (rev-parse, checkout, add, commit)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (fetch, push)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Package manager (publish, dist-tag, whoami)
NPM_TIMEOUT_SECONDS = 5 * 60.0

# Project build and precheck commands
BUILD_TIMEOUT_SECONDS = 60 * 60.0

# Registry metadata fetch
REGISTRY_TIMEOUT_SECONDS = 30.0

# Delay before re-reading the release commit after the staging PR merged
LINEAGE_RETRY_DELAY_SECONDS = 3.0
