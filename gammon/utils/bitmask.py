# gammon/utils/bitmask.py

def bits_from_indices(indices):
    """Build a mask from board point indices (0-based)."""
    mask = 0
    for i in indices:
        mask |= 1 << int(i)
    return mask


def indices_from_bits(mask: int) -> list[int]:
    """Return the list of set bit indices, lowest first."""
    idxs = []
    mask = int(mask)
    while mask:
        lsb = mask & -mask
        idxs.append(lsb.bit_length() - 1)  # bit 0 = point 0
        mask &= mask - 1
    return idxs


def set_bit(idx, mask=0):
    """Set the bit for point idx."""
    return mask | (1 << idx)


def clear_bit(idx, mask):
    """Clear the bit for point idx."""
    return mask & ~(1 << idx)


def is_bit_set(idx, mask):
    """Check whether the bit for point idx is set."""
    return (mask & (1 << idx)) != 0


def set_all_bits(start, end):
    """Mask with every bit from start to end (inclusive) set. Empty if end < start."""
    if end < start:
        return 0
    return ((1 << (end + 1)) - 1) & ~((1 << start) - 1)


def remove_from_mask(mask, remove):
    """
    Remove all bits set in remove from mask.
    """
    return mask & ~remove
