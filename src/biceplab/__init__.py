"""biceplab - companion CLI for the Bicep tutorial

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- The Azure CLI does the real work; biceplab only wires it together

biceplab scaffolds the tutorial's docs and example templates, deploys the
examples through the Azure CLI, and audits the API versions they pin.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
