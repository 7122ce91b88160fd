"""
Static latency lookup between network addresses.

Stands in for a geolocation service: latencies are looked up, never
estimated. Pairs are symmetric and an address is zero distance from itself.
Unknown pairs raise KeyError.
"""


class LatencyTable:
    def __init__(self, latencies=None):
        self._latencies = {}
        for (ip_a, ip_b), value in (latencies or {}).items():
            self.set(ip_a, ip_b, value)

    def set(self, ip_a, ip_b, value):
        if value < 0:
            raise ValueError(f"Latency between {ip_a} and {ip_b} must be non-negative, got {value}")
        self._latencies[frozenset((ip_a, ip_b))] = float(value)

    def latency(self, ip_a, ip_b):
        if ip_a == ip_b:
            return 0.0
        key = frozenset((ip_a, ip_b))
        if key not in self._latencies:
            raise KeyError(f"No latency known between {ip_a} and {ip_b}")
        return self._latencies[key]

    def __len__(self):
        return len(self._latencies)
