"""
monitoring — Check orchestration for OpenShift node monitoring.

    plan.py          which probes run for a node role, at which severity
    events.py        Event model + severity classifier
    orchestrator.py  runs a plan and collects events
    report.py        integration report + JSON output
    cli.py           command line entry point
"""
