from ..compat import supported_virtual_levels

SUBSTVAR_NAME = "dh:CompatLevels"


def do_gen_provides() -> str:
    """Generate the substvar listing the debhelper-compat virtual packages provided."""
    provides = ", ".join(f"debhelper-compat (= {level})" for level in supported_virtual_levels())
    return f"{SUBSTVAR_NAME}={provides}"
