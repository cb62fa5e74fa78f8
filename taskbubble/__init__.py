"""TaskBubble: a small-team task board where tasks float as bubbles."""

__version__ = "0.1.0"
