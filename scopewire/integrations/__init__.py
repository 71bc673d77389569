"""
Framework integrations for SCOPEWIRE containers.
"""
