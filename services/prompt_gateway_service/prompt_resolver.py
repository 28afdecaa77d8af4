"""Map an action onto a provider-specific system instruction and generation parameters."""

from __future__ import annotations

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ActionKind, ExpectedShape, ProviderName
from services.prompt_gateway_service.internal_models import ModelParams, ResolvedPrompt

SUMMARIZE_INSTRUCTION = (
    "You are an expert technical writer. Analyze the provided document and create a "
    "structured prompt for code generation. Extract the key requirements, features, and "
    "technical specifications. Format the response as a clear, actionable prompt that a "
    "developer could use to build the described application."
)

ENHANCE_INSTRUCTION = (
    "You are an expert software architect. Enhance the provided prompt by adding technical "
    "specifications, best practices, accessibility requirements, performance considerations, "
    "and modern development standards. Make the prompt more detailed and actionable for code "
    "generation."
)

GENERATE_MARKDOWN_INSTRUCTION = """\
You are an expert full-stack developer. Generate complete, production-ready code based on \
the user's requirements.

IMPORTANT: Always format your response with proper markdown including:
- Use ```language code blocks for all code
- Include clear explanations before and after code blocks
- Use proper headings (##, ###) to organize your response
- Provide complete, working examples
- Include comments in your code explaining key functionality

Requirements:
- Write clean, modern code following best practices
- Include proper error handling and validation
- Make code responsive and accessible
- Use modern frameworks and libraries when appropriate
- Provide clear documentation and usage instructions"""

GENERATE_FILES_BUNDLE_INSTRUCTION = """\
You are an expert Next.js developer. Generate a complete, production-ready Next.js 14 \
application with TypeScript and Tailwind CSS based on the user's requirements.

IMPORTANT: Return your response as a JSON object with this exact structure:
{
  "files": {
    "package.json": "file content here",
    "next.config.js": "file content here",
    "tailwind.config.js": "file content here",
    "app/layout.tsx": "file content here",
    "app/page.tsx": "file content here",
    "app/globals.css": "file content here",
    "components/ComponentName.tsx": "file content here"
  },
  "description": "Brief description of what was built"
}

Requirements:
- Use Next.js 14 with App Router
- TypeScript for all components
- Tailwind CSS for styling
- Modern React patterns (hooks, functional components)
- Responsive design
- Proper file structure
- Include all necessary configuration files"""

GENERATE_STACKBLITZ_BUNDLE_INSTRUCTION = """\
You are an expert full-stack developer specializing in modern web development. Generate \
complete, production-ready code based on the user's requirements.

CRITICAL: You MUST return your response as a valid JSON object with this EXACT structure:
{
  "files": {
    "package.json": "file content here",
    "next.config.js": "file content here",
    "tailwind.config.js": "file content here",
    "postcss.config.js": "file content here",
    "tsconfig.json": "file content here",
    "app/layout.tsx": "file content here",
    "app/page.tsx": "file content here",
    "app/globals.css": "file content here",
    "components/ComponentName.tsx": "file content here",
    "README.md": "file content here"
  },
  "description": "Brief description of what was built",
  "stackblitzConfig": {
    "title": "Project Title",
    "description": "Project description",
    "template": "nextjs"
  }
}

Requirements:
- Use Next.js 14 with App Router and TypeScript
- Use Tailwind CSS for styling with modern design
- Create responsive, accessible components
- Include proper error handling and loading states
- Generate clean, well-commented code
- Include all necessary configuration files
- Ensure all files have complete, working content

IMPORTANT: Your response must be ONLY the JSON object, no additional text or markdown \
formatting."""

EDIT_MARKDOWN_INSTRUCTION = """\
You are an expert code editor. The user will provide existing code and a modification \
request. Your task is to:

1. Understand the existing code structure and functionality
2. Apply the requested modifications while maintaining code quality
3. Provide the updated code with clear explanations of what changed
4. Use proper markdown formatting with code blocks
5. Explain the changes made and why they were necessary

Always format your response with:
- A brief explanation of the changes
- The updated code in proper markdown code blocks
- Comments highlighting the key modifications
- Any additional notes or recommendations"""

EDIT_BUNDLE_INSTRUCTION = """\
You are an expert code editor. The user will provide existing code and a modification \
request. Your task is to:

1. Understand the existing code structure and functionality
2. Apply the requested modifications while maintaining code quality
3. Return the response as a JSON object with the updated files

CRITICAL: Return your response as a valid JSON object:
{
  "files": {
    "filename.ext": "updated file content"
  },
  "explanation": "Brief explanation of changes made",
  "changes": ["list of key changes"]
}

Always include complete updated code files and comments highlighting key changes."""

CODE_TRIPLE_INSTRUCTION = """\
You are an expert web developer. Generate clean, production-ready HTML, CSS, and \
JavaScript code based on the user's prompt.

Please provide:
1. Complete HTML structure with semantic markup
2. Modern CSS with responsive design and animations
3. Interactive JavaScript with proper error handling
4. Comments explaining key functionality
5. Accessibility features (ARIA labels, proper contrast, keyboard navigation)

Format your response as JSON with 'html', 'css', and 'js' keys."""

CHAT_INSTRUCTION = (
    "You are an expert AI assistant. You are helpful, harmless, and honest. Provide clear, "
    "accurate, and helpful responses to user questions. When discussing code or technical "
    "topics, use proper markdown formatting with code blocks. Be conversational but "
    "professional."
)

# Providers whose generate output is a JSON files bundle rather than markdown
_FILES_BUNDLE_PROVIDERS: tuple[ProviderName, ...] = (
    ProviderName.GOOGLE,
    ProviderName.AZURE_OPENAI,
)


def default_model_for(provider: ProviderName, settings: Settings) -> str:
    """Return the configured default model identifier for a provider."""
    return {
        ProviderName.ANTHROPIC: settings.ANTHROPIC_DEFAULT_MODEL,
        ProviderName.GOOGLE: settings.GOOGLE_DEFAULT_MODEL,
        ProviderName.GROQ: settings.GROQ_DEFAULT_MODEL,
        ProviderName.AZURE_OPENAI: settings.AZURE_OPENAI_DEFAULT_MODEL,
    }[provider]


def _instruction_for(provider: ProviderName, action: str) -> tuple[str, ExpectedShape]:
    if action == ActionKind.SUMMARIZE:
        return SUMMARIZE_INSTRUCTION, ExpectedShape.PLAIN
    if action == ActionKind.ENHANCE:
        return ENHANCE_INSTRUCTION, ExpectedShape.PLAIN
    if action == ActionKind.GENERATE:
        if provider == ProviderName.AZURE_OPENAI:
            return GENERATE_STACKBLITZ_BUNDLE_INSTRUCTION, ExpectedShape.JSON_FILES_BUNDLE
        if provider in _FILES_BUNDLE_PROVIDERS:
            return GENERATE_FILES_BUNDLE_INSTRUCTION, ExpectedShape.JSON_FILES_BUNDLE
        return GENERATE_MARKDOWN_INSTRUCTION, ExpectedShape.PLAIN
    if action == ActionKind.EDIT:
        if provider == ProviderName.AZURE_OPENAI:
            return EDIT_BUNDLE_INSTRUCTION, ExpectedShape.JSON_EDIT_BUNDLE
        return EDIT_MARKDOWN_INSTRUCTION, ExpectedShape.PLAIN
    # chat and unrecognized actions share the generic assistant instruction
    return CHAT_INSTRUCTION, ExpectedShape.PLAIN


def resolve_action_prompt(
    provider: ProviderName,
    action: str,
    settings: Settings,
) -> ResolvedPrompt:
    """Resolve the system instruction, model parameters and expected output shape.

    Pure mapping: unknown actions are tolerated and resolve to the generic assistant
    instruction rather than raising.
    """
    system_instruction, expected_shape = _instruction_for(provider, action)
    return _resolved(provider, system_instruction, expected_shape, settings)


def resolve_code_triple_prompt(provider: ProviderName, settings: Settings) -> ResolvedPrompt:
    """Resolve the prompt for the code endpoint, which expects an html/css/js JSON object."""
    return _resolved(
        provider, CODE_TRIPLE_INSTRUCTION, ExpectedShape.JSON_CODE_TRIPLE, settings
    )


def _resolved(
    provider: ProviderName,
    system_instruction: str,
    expected_shape: ExpectedShape,
    settings: Settings,
) -> ResolvedPrompt:
    return ResolvedPrompt(
        system_instruction=system_instruction,
        model_params=ModelParams(
            model=default_model_for(provider, settings),
            max_tokens=settings.LLM_DEFAULT_MAX_TOKENS,
            temperature=settings.LLM_DEFAULT_TEMPERATURE,
        ),
        expected_shape=expected_shape,
    )
