"""Active lease count per DHCP server."""

from .base import (
    DEVICE_LABELS,
    CollectorContext,
    RouterOSCollector,
    collect_each,
    ret_metric,
)


class DHCPCollector(RouterOSCollector):

    def __init__(self):
        self.leases_active = ret_metric("dhcp", "leases_active", [*DEVICE_LABELS, "server"],
                                        help="number of active leases per DHCP server")

    def describe(self):
        return self.leases_active.describe()

    def collect(self, ctx: CollectorContext) -> None:
        reply = ctx.client.run("/ip/dhcp-server/print", "?disabled=false", "=.proplist=name")
        servers = [re.get("name") for re in reply.re if re.get("name")]
        collect_each(servers, lambda server: self._collect_server(ctx, server))

    def _collect_server(self, ctx: CollectorContext, server: str) -> None:
        reply = ctx.client.run("/ip/dhcp-server/lease/print", f"?server={server}", "=active=", "=count-only=")
        self.leases_active.collect(reply.done.attrs, ctx.with_labels(server))
