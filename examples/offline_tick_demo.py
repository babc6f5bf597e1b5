#!/usr/bin/env python3
"""
fleetscaler 离线演示

展示：
1. first-fit 匹配：两个 fleet 都能跑的任务只计入先注册的那个
2. terminate-on-scale-down 的保护：有任务时不缩容
3. 标签错误的 fleet 被跳过，其余 fleet 正常处理
"""

from fleetscaler.core.controllers import FleetScaler
from fleetscaler.core.entities import FleetDescriptor, Job
from fleetscaler.core.utils import describe_tick, install_stdout_logger
from fleetscaler.providers import RecordingMutator, StaticFleetDiscovery, StaticJobSource

PREFIX = "buildkite-scaler:"


def _tags(**values):
    payload = {"enabled": "true"}
    payload.update(values)
    return {PREFIX + key.replace("_", "-"): str(value) for key, value in payload.items()}


def main():
    install_stdout_logger(include_timestamp=False)

    fleets = [
        FleetDescriptor(
            "sfr-linux",
            "active",
            2,
            _tags(agent_query_rules="queue=default,os=linux", spawn=2, max_capacity=6),
        ),
        FleetDescriptor(
            "sfr-linux-big",
            "active",
            1,
            _tags(agent_query_rules="queue=default,os=linux,size=large", max_capacity=4),
        ),
        FleetDescriptor(
            "sfr-gpu",
            "active",
            5,
            _tags(agent_query_rules="queue=gpu", max_capacity=8, terminate_on_scale_down="true"),
        ),
        FleetDescriptor("sfr-broken", "active", 0, _tags(spawn=0, max_capacity=2)),
        FleetDescriptor("sfr-old", "cancelled_terminating", 3, _tags(max_capacity=3)),
    ]
    jobs = (
        [Job.create(f"build-{i}", "scheduled", ["queue=default"]) for i in range(5)]
        + [Job.create("big-1", "running", ["queue=default", "size=large"])]
        + [Job.create(f"train-{i}", "running", ["queue=gpu"]) for i in range(2)]
        + [Job.create("done", "passed", ["queue=default"])]
    )

    mutator = RecordingMutator()
    scaler = FleetScaler(StaticFleetDiscovery(fleets), StaticJobSource(jobs), mutator)

    print("\n" + "=" * 60)
    print("fleetscaler 离线 tick")
    print("=" * 60)
    report = scaler.run_tick()
    describe_tick(report.to_dict(), "Tick 结果")

    print(f"已应用 {len(mutator.applied)} 个更新:")
    for action in mutator.applied:
        print(f"  - {action.fleet_id}: {action.new_capacity} ({action.termination_policy.value})")


if __name__ == "__main__":
    main()
