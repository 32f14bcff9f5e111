"""
Network probes: traced HTTP requests and bare TCP connects.
"""
