"""Network: expected interfaces present."""
from __future__ import annotations

from boardwise.core.exceptions import ComponentFailure

from ..base import ComponentValidator, Metric, ValidationContext

NET_DIR = "/sys/class/net"


class NetworkValidator(ComponentValidator):
    name = "network"
    resource_names = ("net",)

    def check(self, context: ValidationContext):
        present = [n for n in context.probe.list_dir(NET_DIR) if n != "lo"]
        expected = [str(i) for i in context.setting("interfaces") or []]
        if not expected:
            if not present:
                raise ComponentFailure("no network interfaces besides loopback", metric=Metric("interfaces", 0))
            return f"interfaces: {', '.join(present)}", Metric("interfaces", len(present))

        missing = [i for i in expected if i not in present]
        found = len(expected) - len(missing)
        if missing:
            raise ComponentFailure(
                f"missing interface(s): {', '.join(missing)}", metric=Metric("interfaces", found)
            )
        return f"interfaces: {', '.join(expected)}", Metric("interfaces", found)
