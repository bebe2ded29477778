"""
Infrastructure layer: storage, persistence backends, execution logs, logging setup.
"""
