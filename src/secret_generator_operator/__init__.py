"""
Secret Generator Operator - Annotation-driven secret generation for Kubernetes.

The operator populates and rotates Secret fields declared through annotations:
- Random strings with selectable encoding, length and template
- SSH keypairs
- Basic-auth credentials
"""

__version__ = "0.1.0"
