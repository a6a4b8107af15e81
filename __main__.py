import pulumi

from chat_infra.config import load_config
from chat_infra.stack import deploy

# ---------------------------------------------------------------------------
# 1) CONFIG (validated before anything is declared)
# ---------------------------------------------------------------------------
config = load_config()

# ---------------------------------------------------------------------------
# 2) RESOURCES
# ---------------------------------------------------------------------------
stack = deploy(config)

# ---------------------------------------------------------------------------
# 3) EXPORTS
# ---------------------------------------------------------------------------
for output_name, value in stack.outputs().items():
    pulumi.export(output_name, value)
