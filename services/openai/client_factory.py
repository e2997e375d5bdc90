"""Build the async OpenAI client for the configured provider."""

import logging

from openai import AsyncAzureOpenAI, AsyncOpenAI

from utils.settings import Settings


def create_client(settings: Settings) -> AsyncOpenAI:
    """Return an AsyncOpenAI client, or an Azure one when an endpoint is configured.

    Without an Azure deployment name the SDK routes each request to the
    deployment named after the request's model.
    """
    try:
        if settings.use_azure:
            logging.info("Using Azure OpenAI endpoint %s", settings.azure_endpoint)
            return AsyncAzureOpenAI(
                api_key=settings.api_key,
                azure_endpoint=settings.azure_endpoint,
                azure_deployment=settings.azure_deployment,
                api_version=settings.azure_api_version,
            )
        return AsyncOpenAI(api_key=settings.api_key)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc
