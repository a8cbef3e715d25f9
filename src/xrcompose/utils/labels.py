"""Label keys shared by composite and composed resources."""


class XRLabels:
    """Well-known labels propagated from a composite to its composed resources."""

    # The composite's name, used as the generate-name prefix of composed resources
    COMPOSITE = "crossplane.io/composite"

    # Set when the composite was created for a claim
    CLAIM_NAME = "crossplane.io/claim-name"
    CLAIM_NAMESPACE = "crossplane.io/claim-namespace"

    PROPAGATED = (COMPOSITE, CLAIM_NAME, CLAIM_NAMESPACE)

    @classmethod
    def name_prefix(cls, labels: dict[str, str] | None) -> str:
        """Return the name prefix for composed resources, or an empty string."""
        return (labels or {}).get(cls.COMPOSITE, "")

    @classmethod
    def composed_labels(cls, composite_labels: dict[str, str] | None) -> dict[str, str]:
        """Get the labels a composed resource inherits from its composite.

        Args:
            composite_labels: Labels of the composite resource.

        Returns:
            The subset of propagated labels present on the composite.
        """
        labels = composite_labels or {}
        return {key: labels[key] for key in cls.PROPAGATED if labels.get(key)}
