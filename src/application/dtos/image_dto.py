from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.image import RGBA, Image, ImageVersion, Rect


class RectRecord(BaseModel):
    """Sampling rectangle in the original's pixel coordinates."""
    x0: int = Field(..., description="Left edge (inclusive)", examples=[100])
    y0: int = Field(..., description="Top edge (inclusive)", examples=[0])
    x1: int = Field(..., description="Right edge (exclusive)", examples=[700])
    y1: int = Field(..., description="Bottom edge (exclusive)", examples=[600])


class ImageVersionRecord(BaseModel):
    """Stored form of one version of an image."""
    path: str = Field(..., description="Storage path of the version bytes", examples=["img_3f2a9c/1b7e.png"])
    filename: str = Field(..., description="Filename of the original upload", examples=["photo.png"])
    content_type: str = Field(..., description="MIME type of the stored bytes", examples=["image/png"])
    source_rect: RectRecord = Field(..., description="Region of the original this version was sampled from")
    width: int = Field(..., description="Output width in pixels", examples=[400], gt=0)
    height: int = Field(..., description="Output height in pixels", examples=[400], gt=0)
    grayscale: bool = Field(..., description="Whether the version is grayscale")
    outside_color: str = Field(
        "#00000000",
        description="Fill color for the parts of source_rect outside the original",
        pattern="^#[0-9A-Fa-f]{8}$",
    )
    file_size: int | None = Field(None, description="Size of the stored bytes", ge=0)
    created_at: datetime = Field(..., description="When the version was materialized")


class ImageRecord(BaseModel):
    """Stored form of the image aggregate. versions[0] is the original."""
    id: str = Field(..., description="Unique identifier of the image", examples=["img_3f2a9c"])
    description: str | None = Field(None, description="Free text description")
    link: str | None = Field(None, description="URL the image links to")
    created_at: datetime = Field(..., description="When the original was ingested")
    versions: list[ImageVersionRecord] = Field(..., min_length=1)


def image_to_record(image: Image) -> ImageRecord:
    return ImageRecord(
        id=image.id,
        description=image.description,
        link=image.link,
        created_at=image.created_at,
        versions=[
            ImageVersionRecord(
                path=v.path,
                filename=v.filename,
                content_type=v.content_type,
                source_rect=RectRecord(**vars(v.source_rect)),
                width=v.width,
                height=v.height,
                grayscale=v.grayscale,
                outside_color=RGBA(*v.outside_color).to_hex(),
                file_size=v.file_size,
                created_at=v.created_at,
            )
            for v in image.versions
        ],
    )


def record_to_image(record: ImageRecord) -> Image:
    return Image(
        id=record.id,
        description=record.description,
        link=record.link,
        created_at=record.created_at,
        versions=[
            ImageVersion(
                path=v.path,
                filename=v.filename,
                content_type=v.content_type,
                source_rect=Rect(**v.source_rect.model_dump()),
                width=v.width,
                height=v.height,
                grayscale=v.grayscale,
                outside_color=RGBA.from_hex(v.outside_color),
                file_size=v.file_size,
                created_at=v.created_at,
            )
            for v in record.versions
        ],
    )
