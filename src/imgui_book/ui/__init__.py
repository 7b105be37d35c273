"""User interfaces for imgui-book."""
