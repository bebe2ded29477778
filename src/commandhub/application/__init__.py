"""
Application layer: validation, registry, orchestration and the ports
(interfaces) that keep the core independent of infrastructure.
"""
