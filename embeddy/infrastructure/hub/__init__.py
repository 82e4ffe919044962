from .downloader import ModelDownloader, local_dir_for

__all__ = ["ModelDownloader", "local_dir_for"]
