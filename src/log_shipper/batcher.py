from src.log_shipper.durable_queue import DurableQueue
from src.models.batch import Batch

MAX_BATCH_BYTES = 3 * 1024 * 1024  # 3 MB


class BatchAssembler:
    """Pulls records off the queue into size-bounded batches."""

    def __init__(self, queue: DurableQueue, max_bytes: int = MAX_BATCH_BYTES):
        self.queue = queue
        self.max_bytes = max_bytes

    def pull_batch(self) -> Batch:
        """Pop records until the batch reaches max_bytes or the queue runs dry.

        The record that crosses the limit stays in the batch, so a single
        oversized record ships on its own.
        """
        batch = Batch()
        while not self.queue.is_empty():
            record = self.queue.pop_front()
            if record is None:
                break
            batch.add(record)
            if batch.size_bytes >= self.max_bytes:
                break
        return batch
