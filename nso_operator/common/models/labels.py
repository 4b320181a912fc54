from typing import Dict


class ResourceLabels:
    NSO_DOMAIN: str = "nso.cisco.com/"

    NSO_KIND_LABEL = NSO_DOMAIN + "kind"

    NSO_TARGET_LABEL = NSO_DOMAIN + "target"


class Labels(ResourceLabels):
    KUBERNETES_DOMAIN = "app.kubernetes.io/"

    KUBERNETES_NAME_LABEL = KUBERNETES_DOMAIN + "name"

    KUBERNETES_INSTANCE_LABEL = KUBERNETES_DOMAIN + "instance"

    KUBERNETES_PART_OF_LABEL = KUBERNETES_DOMAIN + "part-of"

    KUBERNETES_MANAGED_BY_LABEL = KUBERNETES_DOMAIN + "managed-by"

    _labels: Dict[str, str]

    def __init__(self, labels: Dict[str, str] = None) -> None:
        self._labels = dict(labels) if labels else dict()

    def update(self, labels: Dict[str, str]) -> "Labels":
        self._labels.update(labels.copy())
        return self

    def as_dict(self) -> Dict[str, str]:
        """Return labels as dictionary."""
        return self._labels.copy()

    def include(self, label: str, value: str) -> "Labels":
        self.update({label: value})
        return self

    def include_nso_kind(self, kind: str) -> "Labels":
        return self.include(self.NSO_KIND_LABEL, kind)

    def include_nso_target(self, target_name: str) -> "Labels":
        return self.include(
            self.NSO_TARGET_LABEL, self.get_or_valid_label_value(target_name)
        )

    def include_kubernetes_name(self, name: str) -> "Labels":
        return self.include(self.KUBERNETES_NAME_LABEL, name)

    def include_kubernetes_instance(self, instance_name: str) -> "Labels":
        return self.include(
            self.KUBERNETES_INSTANCE_LABEL,
            self.get_or_valid_label_value(instance_name),
        )

    def include_kubernetes_part_of(self, part_of: str) -> "Labels":
        return self.include(
            self.KUBERNETES_PART_OF_LABEL, self.get_or_valid_label_value(part_of)
        )

    def include_kubernetes_managed_by(self, operator_name: str) -> "Labels":
        return self.include(self.KUBERNETES_MANAGED_BY_LABEL, operator_name)

    def get_or_valid_label_value(self, value: str) -> str:
        """Validates the value and if needed modifies it to make it a valid Label value:
        * (([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?
        * 63 characters max
        """
        if not value:
            return ""
        value = value[:63]
        return value.rstrip(".-_")

    def __str__(self):
        return f"Labels<{self._labels}>"

    @classmethod
    def empty(cls) -> "Labels":
        return Labels({})

    @classmethod
    def generate_default_labels(
        cls,
        resource_name: str,
        resource_kind: str,
        component_type: str,
        part_of: str,
        managed_by: str,
    ) -> "Labels":
        labels = Labels()
        return (
            labels.include_nso_kind(resource_kind)
            .include_kubernetes_name(component_type)
            .include_kubernetes_instance(resource_name)
            .include_kubernetes_part_of(part_of)
            .include_kubernetes_managed_by(managed_by)
        )
