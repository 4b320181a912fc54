class PackageBundleResources:
    """Encapsulates the naming scheme used for the resources which the operator manages
    for a PackageBundle."""

    @classmethod
    def persistent_volume_claim_name(self, bundle_name: str, target_name: str):
        """Returns the name of the claim holding packages of a bundle for a target NSO."""
        return f"{bundle_name}-{target_name}"

    @classmethod
    def job_name(self, bundle_name: str):
        """Returns the name of the Job that downloads a bundle."""
        return f"download-{bundle_name}"

    @classmethod
    def storage_volume_name(self):
        return "package-storage"

    @classmethod
    def ssh_key_volume_name(self):
        return "git-secret"
