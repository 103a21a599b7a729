SEPARATOR = "::"


def _escape_device_id(device_id: str) -> str:
    # escaped ids never contain ":", so the first SEPARATOR always splits
    return device_id.replace("%", "%25").replace(":", "%3A")


def build_identity(device_id: str, timestamp: str) -> str:
    return f"{_escape_device_id(device_id)}{SEPARATOR}{timestamp}"
