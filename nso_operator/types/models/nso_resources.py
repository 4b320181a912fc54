class NSOResources:
    """Encapsulates the naming scheme used for the resources which the operator manages
    for an NSO instance."""

    CONFIG_VOLUME_NAME = "ncs-config"
    CONFIG_FILE_NAME = "ncs.conf"

    @classmethod
    def stateful_set_name(self, nso_name: str):
        """Returns the name of the NSO `StatefulSet`, which is the NSO name itself."""
        return nso_name

    @classmethod
    def service_name(self, service_name: str):
        """Returns the name of the headless service. It is declared in the NSO spec."""
        return service_name

    @classmethod
    def config_volume_name(self):
        return self.CONFIG_VOLUME_NAME
