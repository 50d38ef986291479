"""Rule-tree domain: closed enumerations, editable models and comparison variants."""
