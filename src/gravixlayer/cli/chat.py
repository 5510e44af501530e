import click

from ._common import Context, handle_sdk_errors, pass_context


@click.command()
@click.option("--model", required=True, help="Model name")
@click.option("--system", help="System prompt (chat mode)")
@click.option("--user", help="User message (chat mode)")
@click.option("--prompt", help="Direct prompt (completions mode)")
@click.option("--temperature", type=float, help="Sampling temperature")
@click.option("--max-tokens", type=int, help="Maximum tokens to generate")
@click.option("--stream", is_flag=True, help="Stream output as it is generated")
@click.option(
    "--mode",
    type=click.Choice(["chat", "completions"]),
    default="chat",
    show_default=True,
    help="API mode",
)
@pass_context
@handle_sdk_errors
def chat(
    ctx: Context,
    model: str,
    system: str | None,
    user: str | None,
    prompt: str | None,
    temperature: float | None,
    max_tokens: int | None,
    stream: bool,
    mode: str,
):
    """
    Chat and text completions.

    Example:
        gravixlayer chat --model meta-llama/llama-3.1-8b-instruct --user "Hello"
    """
    if mode == "chat" and not user:
        raise click.UsageError("--user is required for chat mode")
    if mode == "completions" and not prompt:
        raise click.UsageError("--prompt is required for completions mode")

    client = ctx.client

    if mode == "completions":
        if stream:
            for chunk in client.completions.create_stream(
                model=model,
                prompt=prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            ):
                if chunk.choices[0].text:
                    click.echo(chunk.choices[0].text, nl=False)
            click.echo()
        else:
            completion = client.completions.create(
                model=model,
                prompt=prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            click.echo(completion.choices[0].text)
        return

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": user})

    if stream:
        for chunk in client.chat.completions.create_stream(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        ):
            delta = chunk.choices[0].delta
            if delta is not None and delta.content:
                click.echo(delta.content, nl=False)
        click.echo()
    else:
        completion = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        click.echo(completion.choices[0].message.content)
