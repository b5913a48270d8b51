"""
Question Content Generation Pipeline
generation/

Steps:
1. Prompt Builder   — section / revision prompts from metadata + knowledge bank
2. Gemini Client    — one POST per attempt, fixed 1s/2s/4s retry table
3. Sanitizer        — strip code fences, parse and schema-check the reply
4. Section Filler   — positional merge of validated items into questions
5. Status Tracker   — idle/running/succeeded/failed per fill or revision target
"""
