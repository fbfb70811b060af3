from common.workers.launcher import WorkerLauncher
from packages.billing.workers.usage_worker import UsageBatchWorker

if __name__ == "__main__":
    WorkerLauncher().run(worker_factory=UsageBatchWorker, worker_name="Usage Batch Worker")
