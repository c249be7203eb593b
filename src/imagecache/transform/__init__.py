"""Upstream image transformation service clients."""

from imagecache.transform.client import BackgroundRemover, ImageTransformer, ImgproxyTransformer

__all__ = ["BackgroundRemover", "ImageTransformer", "ImgproxyTransformer"]
