"""
Image dataset collaborator.

Turns a flat pixel buffer, an element dtype and a (count, channels, height,
width) shape into the normalized target vector the GA consumes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np

from .exceptions import DatasetError


@dataclass
class ImageDataset:
    """
    A batch of images stored as a flat buffer.

    Attributes:
        buffer: Raw bytes, or an array whose elements are the pixel values
        dtype: Element type descriptor, e.g. "uint8", "uint16", "float32"
        shape: (count, channels, height, width)
    """
    buffer: Union[bytes, bytearray, memoryview, np.ndarray]
    dtype: str
    shape: tuple[int, int, int, int]

    def __post_init__(self):
        """Validate shape and buffer size."""
        self.shape = tuple(int(dim) for dim in self.shape)
        if len(self.shape) != 4:
            raise DatasetError(
                f"Dataset shape must be (count, channels, height, width), got: {self.shape}"
            )
        if any(dim <= 0 for dim in self.shape):
            raise DatasetError(f"Dataset dimensions must be positive, got: {self.shape}")

        try:
            self._dtype = np.dtype(self.dtype)
        except TypeError as e:
            raise DatasetError(f"Unknown dtype descriptor: {self.dtype}") from e

        expected = int(np.prod(self.shape)) * self._dtype.itemsize
        actual = self._buffer_nbytes()
        if actual != expected:
            raise DatasetError(
                f"Buffer holds {actual} bytes, expected {expected} for shape "
                f"{self.shape} and dtype {self._dtype}"
            )

    def _buffer_nbytes(self) -> int:
        if isinstance(self.buffer, np.ndarray):
            return self.buffer.nbytes
        return memoryview(self.buffer).nbytes

    @classmethod
    def from_array(cls, images: np.ndarray) -> "ImageDataset":
        """
        Wrap an in-memory image array.

        A 3D array is read as (count, height, width) with a single channel.
        """
        images = np.ascontiguousarray(images)
        if images.ndim == 3:
            images = images[:, np.newaxis, :, :]
        if images.ndim != 4:
            raise DatasetError(
                f"Image array must be 3D or 4D, got shape {images.shape}"
            )
        return cls(buffer=images.tobytes(), dtype=images.dtype.str, shape=images.shape)

    @property
    def count(self) -> int:
        return self.shape[0]

    @property
    def image_shape(self) -> tuple[int, int, int]:
        """(channels, height, width) of a single image."""
        return self.shape[1:]

    @property
    def gene_count(self) -> int:
        return int(np.prod(self.image_shape))

    def to_array(self) -> np.ndarray:
        """View the buffer as an array of the declared shape."""
        if isinstance(self.buffer, np.ndarray):
            flat = np.ascontiguousarray(self.buffer).view(self._dtype).reshape(-1)
        else:
            flat = np.frombuffer(self.buffer, dtype=self._dtype)
        return flat.reshape(self.shape)


def normalize_pixels(values: np.ndarray) -> np.ndarray:
    """
    Scale raw pixel values to floats in [0, 1].

    Integer dtypes are divided by the dtype's maximum value; floats and
    booleans are taken as already normalized.

    Raises:
        DatasetError: If any resulting value is NaN or outside [0, 1]
    """
    kind = values.dtype.kind
    if kind in "ui":
        scaled = values.astype(np.float64) / float(np.iinfo(values.dtype).max)
    elif kind in "fb":
        scaled = values.astype(np.float64)
    else:
        raise DatasetError(f"Unsupported pixel dtype: {values.dtype}")

    if np.isnan(scaled).any():
        raise DatasetError("Pixel values contain NaN")
    if scaled.size and (scaled.min() < 0.0 or scaled.max() > 1.0):
        raise DatasetError(
            f"Pixel values must lie in [0, 1] after normalization, "
            f"got range [{scaled.min()}, {scaled.max()}]"
        )
    return scaled


def extract_target(dataset: ImageDataset, index: int = 0) -> np.ndarray:
    """
    Extract one image as a flattened, normalized target vector.

    Args:
        dataset: Source dataset
        index: Image index within the dataset

    Returns:
        Float vector of length channels * height * width

    Raises:
        DatasetError: If index is out of range or pixels are out of range
    """
    if not 0 <= index < dataset.count:
        raise DatasetError(f"Image index {index} out of range for {dataset.count} images")

    image = dataset.to_array()[index]
    target = normalize_pixels(image).reshape(-1)
    target.setflags(write=False)
    return target


def load_dataset(path: Union[str, Path]) -> ImageDataset:
    """
    Load an image dataset from disk.

    Supported formats:
        .npz with keys data, shape and optional dtype (flat buffer layout),
        .npz with a single 3D/4D array under "images",
        .npy holding a 3D or 4D image array.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DatasetError: If the file format is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    if path.suffix == ".npy":
        return ImageDataset.from_array(np.load(path, allow_pickle=False))

    if path.suffix != ".npz":
        raise DatasetError(f"Unsupported dataset format: {path.suffix} (expected .npz or .npy)")

    with np.load(path, allow_pickle=False) as archive:
        if "data" in archive.files:
            if "shape" not in archive.files:
                raise DatasetError(f"Dataset {path} has 'data' but no 'shape' entry")
            data = archive["data"]
            dtype = str(archive["dtype"]) if "dtype" in archive.files else data.dtype.str
            shape = tuple(int(dim) for dim in archive["shape"])
            return ImageDataset(buffer=data.tobytes(), dtype=dtype, shape=shape)

        if "images" in archive.files:
            return ImageDataset.from_array(archive["images"])

    raise DatasetError(f"Dataset {path} must contain 'data'/'shape' or 'images'")
