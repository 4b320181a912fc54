from nso_operator.handlers import nso, packagebundle, watches, probes

__all__ = [
    "nso",
    "packagebundle",
    "watches",
    "probes",
]
