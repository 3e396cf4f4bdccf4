"""QuickXorHash content checksum.

This module implements QuickXorHash, a fast non-cryptographic 160-bit
checksum. Every input byte at position k is conceptually rotated left by
(11 * k) mod 160 bits into a 160-bit register and XORed there. Because the
rotation only depends on k mod 160, the input can first be folded in
160-byte windows, 8 bytes at a time, and the folded bytes moved to their
bit positions once at the end.

The computation is stateless: every call builds its own accumulator and
returns a fresh 20-byte digest.
"""
import base64
import struct


class QuickXorHash:

    # Fixed algorithm parameters
    BLOCK_LEN = 20
    WORD_BYTES = 8
    BITS_IN_BYTE = 8
    SHIFT_BITS = 11
    WIDTH_BYTES = BLOCK_LEN * WORD_BYTES
    WIDTH_BITS = BLOCK_LEN * BITS_IN_BYTE
    NUM_SHIFT_GROUPS = 8

    MASK = (1 << WIDTH_BITS) - 1
    WINDOW_FORMAT = "<%dQ" % BLOCK_LEN
    WORD_FORMAT = "<Q"

    @staticmethod
    def byte_view(data):
        """Return a flat unsigned-byte memoryview over data.

        Contiguous buffers are viewed in place; strided views are copied once.
        """
        view = memoryview(data)
        if not view.contiguous:
            view = memoryview(view.tobytes())
        return view.cast("B")

    @staticmethod
    def fold_blocks(data):
        """XOR-fold data into 20 little-endian 64-bit words.

        Complete 160-byte windows are XORed word by word straight out of the
        caller's buffer. The remaining tail (if any) is packed into one more
        20-word block, the last partial word zero-filled past the end of the
        input, and folded in the same way. data is never modified.
        """
        view = QuickXorHash.byte_view(data)
        length = len(view)
        num_words = length // QuickXorHash.WORD_BYTES
        num_windows = num_words // QuickXorHash.BLOCK_LEN
        words_in_tail = num_words % QuickXorHash.BLOCK_LEN
        if length % QuickXorHash.WORD_BYTES != 0:
            words_in_tail += 1

        acc = [0] * QuickXorHash.BLOCK_LEN
        for i in range(num_windows):
            window = struct.unpack_from(QuickXorHash.WINDOW_FORMAT, view,
                                        i * QuickXorHash.WIDTH_BYTES)
            for j in range(QuickXorHash.BLOCK_LEN):
                acc[j] ^= window[j]

        if words_in_tail == 0:
            return acc

        tail = [0] * QuickXorHash.BLOCK_LEN
        offset = num_windows * QuickXorHash.WIDTH_BYTES
        for j in range(words_in_tail - 1):
            tail[j] = struct.unpack_from(QuickXorHash.WORD_FORMAT, view,
                                         offset + j * QuickXorHash.WORD_BYTES)[0]
        # at most 8 bytes left; bytes beyond the input stay zero
        last = offset + (words_in_tail - 1) * QuickXorHash.WORD_BYTES
        tail[words_in_tail - 1] = int.from_bytes(view[last:], 'little')

        for j in range(QuickXorHash.BLOCK_LEN):
            acc[j] ^= tail[j]
        return acc

    @staticmethod
    def words_to_bytes(words):
        """Return the 160-byte little-endian view of the accumulator words."""
        return b"".join(w.to_bytes(QuickXorHash.WORD_BYTES, 'little') for w in words)

    @staticmethod
    def rotate_left(value, bits):
        """Rotate a 160-bit integer left by bits, modulo 2^160."""
        value &= QuickXorHash.MASK
        bits %= QuickXorHash.WIDTH_BITS
        if bits == 0:
            return value
        return ((value << bits) | (value >> (QuickXorHash.WIDTH_BITS - bits))) & QuickXorHash.MASK

    @staticmethod
    def shift_groups(raw):
        """Split the 160 folded bytes into 8 groups of 20 bytes.

        Raw byte i belongs at bit position p = (11 * i) mod 160. It is stored
        in group p % 8 at byte offset p // 8, so group g only needs a left
        rotation of g bits to put all of its bytes in place. Since 11 is a
        generator of Z160, no two raw bytes share a slot.
        """
        groups = [bytearray(QuickXorHash.BLOCK_LEN)
                  for _ in range(QuickXorHash.NUM_SHIFT_GROUPS)]
        for i in range(QuickXorHash.WIDTH_BYTES):
            true_pos = (i * QuickXorHash.SHIFT_BITS) % QuickXorHash.WIDTH_BYTES
            shift = true_pos % QuickXorHash.BITS_IN_BYTE
            align = true_pos // QuickXorHash.BITS_IN_BYTE
            groups[shift][align] = raw[i]
        return groups

    @staticmethod
    def realign(words):
        """Turn the folded accumulator into the corrected 20-byte block.

        Each shift group is read as a little-endian 160-bit integer, rotated
        by its index and XORed into the result. The result is returned with
        its byte order reversed (most significant byte first).
        """
        groups = QuickXorHash.shift_groups(QuickXorHash.words_to_bytes(words))
        result = 0
        for shift, group in enumerate(groups):
            result ^= QuickXorHash.rotate_left(int.from_bytes(group, 'little'), shift)
        return result.to_bytes(QuickXorHash.BLOCK_LEN, 'big')

    @staticmethod
    def inject_length(block, length):
        """XOR the 64-bit length into bytes 0..7 of block, most significant first.

        The block is already in reversed (big-endian) order, so this is the
        same as XORing the little-endian length into its low 8 bytes.
        """
        if length < 0 or length >= 1 << 64:
            raise ValueError("Length must fit in an unsigned 64-bit integer: %r" % (length,))
        if len(block) != QuickXorHash.BLOCK_LEN:
            raise ValueError("Expected a %d-byte block, got %d bytes"
                             % (QuickXorHash.BLOCK_LEN, len(block)))
        out = bytearray(block)
        for i, b in enumerate(length.to_bytes(QuickXorHash.WORD_BYTES, 'big')):
            out[i] ^= b
        return bytes(out)

    @staticmethod
    def digest(data):
        """Compute the 20-byte QuickXorHash of an in-memory bytes-like value."""
        if isinstance(data, str):
            raise TypeError("QuickXorHash needs bytes, not str")
        view = QuickXorHash.byte_view(data)
        words = QuickXorHash.fold_blocks(view)
        return QuickXorHash.inject_length(QuickXorHash.realign(words), len(view))

    @staticmethod
    def hexdigest(data):
        """Return the digest of data as 40 lowercase hex characters."""
        return QuickXorHash.digest(data).hex()

    @staticmethod
    def b64digest(data):
        """Return the digest of data as a base64 string.

        Sync services publish the byte-reversed digest; use
        base64.b64encode(QuickXorHash.digest(data)[::-1]) to compare.
        """
        return base64.b64encode(QuickXorHash.digest(data)).decode('ascii')
