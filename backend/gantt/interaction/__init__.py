from gantt.interaction.controller import (
    InteractionController,
    InteractionOptions,
    InteractionState,
)
