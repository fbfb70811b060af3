from common.workers.launcher import WorkerLauncher
from packages.billing.workers.subscription_update_worker import SubscriptionUpdateWorker

if __name__ == "__main__":
    WorkerLauncher().run(
        worker_factory=SubscriptionUpdateWorker,
        worker_name="Subscription Update Worker",
    )
