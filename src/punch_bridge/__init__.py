"""punch-bridge package.

Bridges a biometric attendance terminal and an HR backend. Organized by
feature modules (punches, sessions, employees, devices, sync) with a thin
Flask controller layer on top of the service/repository layers.
"""

__version__ = "0.3.0"
