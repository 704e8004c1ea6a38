"""Fixed-size text chunking with overlap."""


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 200) -> list[str]:
    """
    Split text into overlapping windows.

    Window ``i`` starts at ``i * (chunk_size - overlap)``. The final window ends
    at ``len(text)``.

    Args:
        text: Text to split.
        chunk_size: Characters per window.
        overlap: Characters shared by consecutive windows.

    Returns:
        List of chunks, empty for empty text.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be non-negative and smaller than chunk_size")

    chunks = []
    step = chunk_size - overlap
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        chunks.append(text[start:end])
        if end == len(text):
            break
        start += step
    return chunks
