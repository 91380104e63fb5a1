"""mesoswatch: wait for a Mesos agent to register with the elected master."""

__version__ = "0.1.0"
