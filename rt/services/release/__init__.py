"""Release-train derivation, staging and publishing."""
