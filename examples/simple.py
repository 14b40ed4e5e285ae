"""
Two scheduler instances in one process, sharing one Redis.

Both schedule the same job every five seconds; each tick runs on only one of
them. Requires a Redis server at CRONSYNC_REDIS_URL (default localhost:6379).
"""
import asyncio
import os

from cronsync import CronSync, CronSyncSettings, HttpTask

REDIS_URL = os.environ.get("CRONSYNC_REDIS_URL", "redis://localhost:6379")


def make_task(instance: str):
    async def report():
        print(f"report generated by {instance}")
        await asyncio.sleep(1)
        return {"instance": instance}
    return report


async def main():
    instance_a = CronSync(CronSyncSettings(instance_id="instance-a", redis_url=REDIS_URL, lock_timeout=10000), configure_logging=True)
    instance_b = CronSync(CronSyncSettings(instance_id="instance-b", redis_url=REDIS_URL, lock_timeout=10000))

    async with instance_a, instance_b:
        await instance_a.schedule("*/5 * * * * *", "report", make_task("instance-a"))
        await instance_b.schedule("*/5 * * * * *", "report", make_task("instance-b"))
        await instance_a.schedule(
            "0 * * * * *", "ping", HttpTask.from_dict({"url": "https://example.com"}), {"timeout": 10}
        )

        await asyncio.sleep(30)

        for job in instance_a.list_jobs() + instance_b.list_jobs():
            print(f"{job.id}: ran {job.run_count} times locally")
        print(await instance_a.get_stats("report"))


if __name__ == "__main__":
    asyncio.run(main())
