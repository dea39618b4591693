"""
Locust load testing for the queue API.

Run with:
    locust -f tests/load/locustfile.py --host=http://localhost:8000

Or headless:
    locust -f tests/load/locustfile.py --host=http://localhost:8000 \
        --headless -u 100 -r 10 --run-time 5m
"""

import random
import uuid

from locust import HttpUser, between, task

TEST_QUEUES = [f"load-test-queue-{i}" for i in range(5)]


class ProducerUser(HttpUser):
    """
    Simulated producer appending items to a handful of queues.
    """

    wait_time = between(0.1, 0.5)

    def on_start(self):
        """Called when a user starts."""
        self.queue_name = random.choice(TEST_QUEUES)

    @task(10)
    def enqueue(self):
        """Append a new item."""
        self.client.post(
            f"/v1/queues/{self.queue_name}/items",
            json={"payload": {"id": uuid.uuid4().hex, "size": random.randint(1, 100)}},
            name="/v1/queues/{queue_name}/items [POST]",
        )

    @task(1)
    def depth(self):
        """Check how far behind consumers are."""
        self.client.get(
            f"/v1/queues/{self.queue_name}",
            name="/v1/queues/{queue_name} [GET]",
        )


class ConsumerUser(HttpUser):
    """
    Simulated consumer competing for items on the same queues.

    An empty queue answers 204, which is a success, not a failure.
    """

    wait_time = between(0.1, 0.5)

    def on_start(self):
        """Called when a user starts."""
        self.queue_name = random.choice(TEST_QUEUES)
        self.seen: set[int] = set()

    @task
    def dequeue(self):
        """Claim the next item and check it was not delivered before."""
        with self.client.post(
            f"/v1/queues/{self.queue_name}/dequeue",
            name="/v1/queues/{queue_name}/dequeue [POST]",
            catch_response=True,
        ) as response:
            if response.status_code == 204:
                response.success()
                return
            if response.status_code != 200:
                response.failure(f"Unexpected status {response.status_code}")
                return

            item_id = response.json()["id"]
            if item_id in self.seen:
                response.failure(f"Item {item_id} delivered twice")
            self.seen.add(item_id)


class JanitorUser(HttpUser):
    """
    Occasional maintenance traffic running alongside producers and consumers.
    """

    wait_time = between(5, 10)

    @task(3)
    def stats(self):
        """Get pending counts."""
        self.client.get("/v1/queues", name="/v1/queues [GET]")

    @task(1)
    def cleanup(self):
        """Purge processed items."""
        self.client.post(
            "/v1/queues/cleanup",
            json={"expiry_seconds": 60},
            name="/v1/queues/cleanup [POST]",
        )

    @task(1)
    def health_check(self):
        """Check API health."""
        self.client.get("/health", name="/health [GET]")
