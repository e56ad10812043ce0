"""autostack - Self-hosted Mautic + n8n stack provisioning."""

__version__ = "0.1.0"
