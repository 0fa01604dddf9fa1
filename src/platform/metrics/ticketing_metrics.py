from prometheus_client import Counter, Gauge, Histogram


class TicketingMetrics:
    """
    Ticket lifecycle metrics: issuance, cancellation/refund and door scans.

    Labels stay low-cardinality (result kinds, actions); event ids are not labels.
    """

    def __init__(self) -> None:
        # ========== Ledger ==========
        self.ticket_issue_requests = Counter(
            'ticket_issue_requests_total',
            'Ticket issuance attempts',
            ['result'],  # success / error kind
        )

        self.ticket_issue_duration = Histogram(
            'ticket_issue_duration_seconds',
            'Ticket issuance processing time (including payment confirmation)',
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.ticket_cancellations = Counter(
            'ticket_cancellations_total',
            'Ticket cancellation attempts',
            ['result'],
        )

        self.refund_requests = Counter(
            'refund_requests_total',
            'Refund requests sent to the payment gateway',
            ['outcome'],  # accepted / rejected / timeout / error
        )

        self.identifier_collisions = Counter(
            'ticket_identifier_collisions_total',
            'Generated ticket number / verification token collisions',
        )

        # ========== Check-in ==========
        self.scans = Counter(
            'ticket_scans_total',
            'Door scans',
            ['action', 'result'],  # action: entry/exit
        )

        self.scans_in_flight = Gauge('ticket_scans_in_flight', 'Scans currently being processed')

    # ========== Helper Methods ==========

    def record_issue(self, *, result: str, duration: float) -> None:
        self.ticket_issue_requests.labels(result=result).inc()
        self.ticket_issue_duration.observe(duration)

    def record_cancellation(self, *, result: str) -> None:
        self.ticket_cancellations.labels(result=result).inc()

    def record_refund(self, *, outcome: str) -> None:
        self.refund_requests.labels(outcome=outcome).inc()

    def record_scan(self, *, action: str, result: str) -> None:
        self.scans.labels(action=action, result=result).inc()


# Global metrics instance
metrics = TicketingMetrics()
